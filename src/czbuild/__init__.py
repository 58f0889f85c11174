"""czbuild - transpile .cz sources to C and build multi-file projects."""

__version__ = "0.1.0"
