from jobguard.cli.app import app

app()
