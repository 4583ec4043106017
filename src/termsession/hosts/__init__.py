"""Ready-made command hosts for termsession sessions."""

from termsession.hosts.shell import ShellCommandError, ShellCommandHost

__all__ = ["ShellCommandError", "ShellCommandHost"]
