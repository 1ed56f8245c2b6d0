"""
Smoke tests to verify all modules can be imported.
"""

def test_import_sandbox():
    import sandbox
    assert hasattr(sandbox, '__version__')


def test_import_evaluator():
    import evaluator
    assert hasattr(evaluator, '__version__')


def test_import_verifier():
    import verifier
    assert hasattr(verifier, '__version__')
    assert callable(verifier.run_tests)
    assert callable(verifier.analyze_code_safety)
