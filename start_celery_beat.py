#!/usr/bin/env python3
"""
Start Celery Beat for Optima deadline-expiry sweeps
"""

import sys
from optima.celery_app import celery_app

if __name__ == "__main__":
    print("Starting Celery Beat for Optima...")
    print("This will sweep overdue pending projects on a fixed interval")
    print("Press Ctrl+C to stop")

    try:
        celery_app.start(['beat', '--loglevel=info'])
    except KeyboardInterrupt:
        print("\nStopping Celery Beat...")
        sys.exit(0)
