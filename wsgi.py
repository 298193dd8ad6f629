import os

from dotenv import load_dotenv

# Load environment variables from .env before the config class is read
project_home = os.path.dirname(os.path.abspath(__file__))
dotenv_path = os.path.join(project_home, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)

from app import create_app  # noqa: E402

application = create_app()
