class CompileOptions:
    """Per-invocation compiler settings.

    - strict: raise LexError on unterminated tags, comments and raw blocks
      instead of degrading them to best-effort tokens.
    - collect_errors: record non-fatal ParseError diagnostics on the result.
    - inject_assets: run the deferred <load> injection pass.
    - encoding: text encoding for the file entry points.
    """

    __slots__ = ("collect_errors", "encoding", "inject_assets", "strict")

    def __init__(self, strict=False, collect_errors=False, inject_assets=True, encoding="utf-8"):
        self.strict = bool(strict)
        self.collect_errors = bool(collect_errors)
        self.inject_assets = bool(inject_assets)
        self.encoding = encoding

    def __repr__(self):
        return (
            f"CompileOptions(strict={self.strict}, collect_errors={self.collect_errors}, "
            f"inject_assets={self.inject_assets}, encoding={self.encoding!r})"
        )
