"""Tests for log redaction of query parameters."""

from __future__ import annotations

import re
import unittest

from sqlitekit.redact import MASK, redact_params, redact_text


class TestRedactText(unittest.TestCase):
    def test_email(self):
        self.assertEqual(redact_text("mail john@example.com now"), "mail [REDACTED_EMAIL] now")

    def test_tokens(self):
        self.assertEqual(redact_text("key sk-abcdefghijkl1234"), "key sk-[REDACTED]")
        self.assertEqual(redact_text("Authorization: Bearer abc.def"), "Authorization: Bearer [REDACTED]")

    def test_extra_patterns(self):
        out = redact_text("ssn 123-45-6789", [(re.compile(r"\d{3}-\d{2}-\d{4}"), "[SSN]")])
        self.assertEqual(out, "ssn [SSN]")

    def test_extra_patterns_for_service_tokens(self):
        github = [(re.compile(r"github_pat_[A-Za-z0-9_]+"), "github_pat_[REDACTED]")]
        self.assertEqual(redact_text("token github_pat_11ABC_def", github), "token github_pat_[REDACTED]")
        self.assertEqual(redact_text("token github_pat_11ABC_def"), "token github_pat_11ABC_def")

    def test_plain_text_untouched(self):
        self.assertEqual(redact_text("SELECT * FROM users"), "SELECT * FROM users")


class TestRedactParams(unittest.TestCase):
    def test_sensitive_keys_masked(self):
        params = {"username": "john", "password": "hunter2", "api_key": "k", "authToken": "t"}
        self.assertEqual(
            redact_params(params),
            {"username": "john", "password": MASK, "api_key": MASK, "authToken": MASK},
        )

    def test_input_not_mutated(self):
        params = {"password": "hunter2"}
        redact_params(params)
        self.assertEqual(params, {"password": "hunter2"})

    def test_sequence_values(self):
        self.assertEqual(redact_params(("john@example.com", 3, None)), ["[REDACTED_EMAIL]", 3, None])

    def test_blob_summarised(self):
        self.assertEqual(redact_params([b"\x00\x01\x02"]), ["<3 bytes>"])

    def test_batches(self):
        batch = [{"secret": "s", "n": 1}, ("a@b.io",)]
        self.assertEqual(redact_params(batch), [{"secret": MASK, "n": 1}, ["[REDACTED_EMAIL]"]])

    def test_none(self):
        self.assertIsNone(redact_params(None))


if __name__ == "__main__":
    unittest.main()
