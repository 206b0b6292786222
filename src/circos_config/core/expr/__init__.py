"""Avaliador sandboxed de expressões de configuração."""
