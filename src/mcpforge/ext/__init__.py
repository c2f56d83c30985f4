"""Extensions: protocol servers."""
