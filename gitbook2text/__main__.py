from gitbook2text.cli import cli

if __name__ == "__main__":
    cli()
