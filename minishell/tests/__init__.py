"""minishell test suite."""
