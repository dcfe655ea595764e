"""
Punto de entrada: python -m warren
"""

from warren.cli.app import app

if __name__ == "__main__":
    app()
