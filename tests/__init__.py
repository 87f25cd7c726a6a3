"""Test suite for the live relay.

Unit tests live under unit/, organized by feature area, with in-memory fakes
for the client, the upstream transport and credentials in helpers/.
"""
