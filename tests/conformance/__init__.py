"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Supply conservation across every operation
2. atomicity.py - All-or-nothing call semantics
3. idempotency.py - Repeated releases never double-credit
4. determinism.py - Same call sequence, same state
5. canonicalization.py - Canonical persisted form
6. temporal.py - Unlock boundaries and the logical clock

These tests use hypothesis for property-based testing.
"""
