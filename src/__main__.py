import sys
from pathlib import Path

from streamlit.web import cli as stcli

from config import settings

if __name__ == "__main__":
    sys.argv = [
        "streamlit",
        "run",
        str(Path(__file__).parent / "ui" / "app.py"),
        "--server.port",
        str(settings.streamlit_port),
    ]
    sys.exit(stcli.main())
