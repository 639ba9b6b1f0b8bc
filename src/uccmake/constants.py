"""Literal vocabulary of the UCC compiler protocol.

The compiler and the hook scripts only speak unstructured text, so every
marker the output classifier looks for lives here.
"""


class File:
    """File and directory names of a module workspace."""

    UCC = "ucc.exe"
    SYSTEM_DIRECTORY = "System"
    MAKE_INI = "make.ini"
    PRE_BUILD = "PreBuild.bat"
    POST_BUILD = "PostBuild.bat"
    ARTIFACT_SUFFIX = ".u"
    BACKUP_SUFFIX = ".bak"
    FLATTEN_DESTINATION = "classes"


class Compiler:
    """Markers emitted by `ucc make`."""

    SUCCESS_PREFIX = "Success - "
    FAILURE_PREFIX = "Failure - "
    ABORTED_MESSAGE = "Compile aborted due to errors."
    ERROR_MARKER = ": Error,"
    WARNING_MARKER = ": Warning,"
    SOURCE_SEPARATOR = " : "
    SUMMARY_SEPARATOR = ", "


class PostBuild:
    """Markers emitted by the usual `copy`-based hook scripts."""

    COPYING_PREFIX = "Copying "
    COPIED_SUFFIX = " copied."
