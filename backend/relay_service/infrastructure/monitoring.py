"""
Usage Monitoring Component
Records outbound API calls (chat platform and backend) and summarizes them
"""

import csv
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional, Union

from .logging import RelayLogger

TIME_RANGES = {
    '10min': timedelta(minutes=10),
    '1hour': timedelta(hours=1),
    '1day': timedelta(days=1),
}


class UsageMonitor:
    """Append-only CSV of API calls with simple windowed statistics."""

    def __init__(self, log_dir: Union[str, Path] = "logs", log: Optional[RelayLogger] = None):
        self.log = log or RelayLogger(component="Monitor")
        self.log_dir = Path(log_dir)
        self.csv_file = self.log_dir / "api_usage.csv"
        self._lock = threading.Lock()

    def _ensure_file(self) -> None:
        if not self.csv_file.exists():
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.csv_file, 'w', newline='') as f:
                writer = csv.writer(f)
                writer.writerow(['timestamp', 'api', 'endpoint', 'status'])

    def log_request(self, api: str, endpoint: str, status: str = 'success') -> None:
        """Log an API request"""
        timestamp = datetime.now().isoformat()

        with self._lock:
            self._ensure_file()
            with open(self.csv_file, 'a', newline='') as f:
                writer = csv.writer(f)
                writer.writerow([timestamp, api, endpoint, status])

    def get_stats(self, time_range: str = '10min') -> Dict:
        """
        Get statistics for a time range
        time_range: '10min', '1hour', '1day'
        """
        cutoff = datetime.now() - TIME_RANGES.get(time_range, TIME_RANGES['10min'])

        total = 0
        errors = 0
        api_stats = defaultdict(lambda: {'total': 0, 'errors': 0})

        if self.csv_file.exists():
            with open(self.csv_file, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    try:
                        ts = datetime.fromisoformat(row['timestamp'])
                    except (KeyError, TypeError, ValueError) as e:
                        self.log.error(f"Error parsing monitoring row: {e}")
                        continue
                    if ts < cutoff:
                        continue
                    total += 1
                    api_stats[row['api']]['total'] += 1
                    if row['status'] == 'error':
                        errors += 1
                        api_stats[row['api']]['errors'] += 1

        return {
            'time_range': time_range,
            'total_requests': total,
            'total_errors': errors,
            'api_breakdown': dict(api_stats),
        }
