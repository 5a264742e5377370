import os

from dotenv import load_dotenv

from quicklaunch.cli.commands import app

# Load .env file from ~/.quicklaunch/ if it exists
# Precedence: existing env vars > .env file (override=False)
load_dotenv(os.path.expanduser("~/.quicklaunch/.env"), override=False)

if __name__ == "__main__":
    app()
