# Vercel entry point: serves the same ASGI app as `python main.py`.
# Deploy with the repository root as the project root so `main` is importable.
from main import build_app

app = build_app()
