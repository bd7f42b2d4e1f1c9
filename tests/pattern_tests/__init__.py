"""
Coded-token pattern test suite for HL7Annotate.

Covers the three delimiter framings InfoPath uses, rejection of tokens that
already carry a concept-name annotation, scanning several tokens in one line,
and adversarial markup around and inside tokens.

Run tests with: pytest tests/pattern_tests/ -v
"""
