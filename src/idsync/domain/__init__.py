"""Directory reconciliation domain: pure logic plus the ports it drives."""
