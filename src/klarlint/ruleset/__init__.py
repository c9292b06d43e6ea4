"""Rule-set configuration — which rules run and how results are judged."""
