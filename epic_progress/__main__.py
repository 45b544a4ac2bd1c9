from .cli import app

app(prog_name="epic-progress")
