from docimport.cli.main import cli

cli()
