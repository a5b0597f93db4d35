from credvault.main import cli

cli()
