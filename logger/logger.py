import json
import os
from datetime import datetime, timezone

class JSONLogger:
    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _log_to_file(self, filename, entries):
        path = os.path.join(self.output_directory, filename)
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def log(self, entry: dict):
        """Log a single entry to the main run log."""
        self.log_batch([entry])

    def log_batch(self, entries: list):
        """Log a batch of entries to the main run log."""
        with open(self.current_log, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def rotate(self):
        """Start a new main log file if the UTC date has changed."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def log_summary(self, entries: list):
        """Log per-machine outcomes (status, steps, final tape)."""
        self.log_batch(entries)

    def log_halting(self, entries: list):
        """Log machines that reached HALT."""
        self._log_to_file(f"halting_{self.today}.jsonl", entries)

    def log_stuck(self, entries: list):
        """Log machines that stopped with no matching rule."""
        self._log_to_file(f"stuck_{self.today}.jsonl", entries)
