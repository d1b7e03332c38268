# c3_chart_maker/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Package Root ---
PACKAGE_DIR = Path(__file__).parent

# --- File Paths ---
TEMPLATES_DIR = PACKAGE_DIR / "templates"
CHART_TEMPLATE_PATH = Path(
    os.getenv("C3_TEMPLATE_PATH", TEMPLATES_DIR / "chart_template.html")
)

# --- Chart Container ---
# The template hosts an empty <div id="view">; C3 renders its <svg> into it.
CHART_CONTAINER_ID = "view"
CHART_BINDTO = f"#{CHART_CONTAINER_ID}"
CHART_SELECTOR = f"{CHART_BINDTO} svg"

# --- Chart Libraries ---
# Loaded into the template after it opens. Each is a URL or a local file path;
# point them at local copies to render without network access.
CDNJS_URL = "https://cdnjs.cloudflare.com/ajax/libs"
D3_SCRIPT = os.getenv("C3_D3_SCRIPT", f"{CDNJS_URL}/d3/5.16.0/d3.min.js")
C3_SCRIPT = os.getenv("C3_C3_SCRIPT", f"{CDNJS_URL}/c3/0.7.20/c3.min.js")
C3_STYLESHEET = os.getenv("C3_C3_STYLESHEET", f"{CDNJS_URL}/c3/0.7.20/c3.min.css")

# --- Rendering Settings ---
DEFAULT_WAIT_TIMEOUT_MS = int(os.getenv("C3_WAIT_TIMEOUT_MS", "30000"))
DUMP_CHART = os.getenv("C3_DUMP_CHART", "").lower() in ("1", "true", "yes")
CHROMIUM_EXECUTABLE_PATH = os.getenv("C3_CHROMIUM_PATH") or None
BROWSER_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']

# Viewport used before the chart is measured
INITIAL_VIEWPORT = {'width': 1280, 'height': 720}

# --- Validation ---
if not CHART_TEMPLATE_PATH.exists():
    raise FileNotFoundError(
        f"Chart template not found at {CHART_TEMPLATE_PATH}. "
        "Check C3_TEMPLATE_PATH or reinstall the package."
    )
