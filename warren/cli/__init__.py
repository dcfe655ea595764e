"""
CLI: composición de comandos typer y formato rich.
"""
