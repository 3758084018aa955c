import logging
from pathlib import Path

from .generator import CodeGenerator
from .options import CompileOptions
from .tokenizer import Tokenizer
from .treebuilder import TreeBuilder

logger = logging.getLogger(__name__)


class Template:
    """A compiled template.

    Compilation runs on construction: ``tokens`` holds the token list,
    ``root`` the DocumentNode, ``output`` the generated PHP text and
    ``errors`` the non-fatal diagnostics when ``opts.collect_errors`` is set.
    """

    __slots__ = ("errors", "opts", "output", "root", "tokens")

    def __init__(self, source, *, opts=None):
        self.opts = opts or CompileOptions()
        self.errors = []

        errors = self.errors if self.opts.collect_errors else None
        self.tokens = Tokenizer(source, strict=self.opts.strict, errors=errors).run()

        tree_builder = TreeBuilder(collect_errors=self.opts.collect_errors)
        self.root = tree_builder.build(self.tokens)
        self.errors.extend(tree_builder.errors)

        self.output = CodeGenerator(self.opts).generate(self.root)

    def __str__(self):
        return self.output

    def __repr__(self):
        return f"<Template tokens={len(self.tokens)} errors={len(self.errors)}>"


def compile_text(source, *, strict=False, inject_assets=True):
    """Compile template source text to PHP source text."""
    opts = CompileOptions(strict=strict, inject_assets=inject_assets)
    return Template(source, opts=opts).output


def compile_file(path, *, opts=None):
    opts = opts or CompileOptions()
    path = Path(path)
    if not path.is_file():
        msg = f"Template file not found: {path}"
        raise FileNotFoundError(msg)
    logger.debug("compiling %s", path)
    return Template(path.read_text(encoding=opts.encoding), opts=opts).output


def save_compiled(template_path, output_path, *, opts=None):
    """Compile `template_path` and write the result to `output_path`.

    Nothing is written when compilation fails.
    """
    opts = opts or CompileOptions()
    output = compile_file(template_path, opts=opts)
    Path(output_path).write_text(output, encoding=opts.encoding)
