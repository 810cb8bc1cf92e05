"""
Entry point for running the package: python -m jdex
Launches the PyQt6 GUI.
"""
from jdex.gui import main

if __name__ == "__main__":
    main()
