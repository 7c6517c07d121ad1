from gmail_mcp.cli.main import cli

cli()
