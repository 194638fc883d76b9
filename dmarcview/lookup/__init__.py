"""Network lookups annotating DMARC report rows."""
