"""
CallFlow test suite.

Running Tests:
    pytest tests/unit -v
"""
