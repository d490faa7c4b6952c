from coronadb.cli.main import app

app()
