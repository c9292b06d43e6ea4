"""Static analysis engine: lexer, parser, rules, aggregation."""
