"""HTTP control surface for termsession.

Lets a remote host push log entries, inject commands, answer prompts and
query layout metrics of named sessions.
"""
