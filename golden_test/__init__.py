"""A golden-file test harness for text-in/text-out programs."""
