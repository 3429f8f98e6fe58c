from simpletask.cli import app

app(prog_name="simpletask")
