class Node:
    """Base for template tree nodes.

    - name: tag name for elements, or one of '#document', '#text',
      '#comment', '#raw'
    - children: list of child nodes (always empty for leaves)
    - parent: owning node, set once by append_child
    """

    __slots__ = ("children", "name", "parent")

    def __init__(self, name):
        self.name = name
        self.children = []
        self.parent = None

    def append_child(self, child):
        if child.parent is not None:
            msg = f"{child.name} already belongs to {child.parent.name}"
            raise ValueError(msg)
        child.parent = self
        self.children.append(child)


class DocumentNode(Node):
    __slots__ = ()

    def __init__(self):
        super().__init__("#document")

    def __repr__(self):
        return f"<DocumentNode children={len(self.children)}>"


class ElementNode(Node):
    __slots__ = ("attrs",)

    def __init__(self, name, attrs=None):
        if not name:
            msg = "Empty tag name passed to ElementNode (bug: tokenizer produced a nameless tag)"
            raise ValueError(msg)
        super().__init__(name)
        self.attrs = dict(attrs) if attrs else {}

    @property
    def tag_name(self):
        return self.name.lower()

    def has_attr(self, name):
        return name in self.attrs

    def __repr__(self):
        return f"<ElementNode {self.name} attrs={self.attrs!r} children={len(self.children)}>"


class _LeafNode(Node):
    __slots__ = ("data",)

    NAME = ""

    def __init__(self, data=""):
        super().__init__(self.NAME)
        self.data = data if data is not None else ""

    def append_child(self, child):
        msg = f"{self.name} nodes cannot have children"
        raise ValueError(msg)

    def __repr__(self):
        return f"<{type(self).__name__} {self.data!r}>"


class TextNode(_LeafNode):
    __slots__ = ()

    NAME = "#text"


class CommentNode(_LeafNode):
    __slots__ = ()

    NAME = "#comment"


class RawCodeNode(_LeafNode):
    """A ``{@ ... }`` block, stored with its own delimiters."""

    __slots__ = ()

    NAME = "#raw"
