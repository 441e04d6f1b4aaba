"""
Newsletter API
==============

Development server for the newsletter subscription endpoint.

Run with:
    python app.py

Visit:
    http://localhost:5000/api/newsletter?check  - Health check
"""

from newsletter import create_app
from newsletter.core import Config

app = create_app()


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Newsletter API")
    print("=" * 60)
    print(f"Health check:    http://localhost:{Config.PORT}/api/newsletter?check")
    print(f"Subscribers:     http://localhost:{Config.PORT}/api/newsletter?admin=view")
    print(f"CSV export:      http://localhost:{Config.PORT}/api/newsletter?export=csv")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.PORT, debug=True)
