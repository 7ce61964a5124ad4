"""Producer/consumer pipeline between audio capture and recognition."""
