"""Services: crawling, decoding, pagination."""
