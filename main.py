"""
Review Reply - Web Server Entry Point
=====================================

Run this to start the API server:
    python main.py

Then open http://localhost:8000/docs in your browser.

To auto-draft every pending review from the command line:
    python run_autodraft.py
"""

import uvicorn


def main():
    """Start the web server."""
    print("\n" + "=" * 50)
    print("   Review Reply - API Server")
    print("=" * 50)
    print("\n   Starting server at http://localhost:8000")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "reviewreply.web.app:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )


if __name__ == "__main__":
    main()
