"""StrideScan Test Suite

Test modules:
    test_partition    — stride partition completeness and shape
    test_worker       — worker probe loop, states, real-socket probe
    test_coordinator  — threaded engine: ordering, idempotence, abort policy
    test_async_engine — asyncio engine: same contracts as the threaded one
    test_validators   — target / worker count / timeout validation
    test_cli          — argument rejection, config layering, exit codes
    test_layering     — static import analysis (core / utils never import main)

Run all tests:
    pytest tests/ -v
"""
