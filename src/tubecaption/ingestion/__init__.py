"""Watch-page scraping and timed-text decoding."""
