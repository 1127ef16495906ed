from pathlib import Path

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from project root if present.

    Values already present in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)
