# Portfolio Capture - Configuration Package
