"""Built-in CLI sub-commands for swagnote.

* :mod:`~swagnote.commands.generate` -- build and write the document.
* :mod:`~swagnote.commands.inspect` -- print paths or definitions of the
  document without writing it.

``generate`` is a plain callback registered on the root app; ``inspect``
is a :class:`typer.Typer` sub-application.
"""
