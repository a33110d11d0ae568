"""Picture line compilation: lexer, field classifier and spec compiler."""
