"""CLI sub-command groups for specreq.

* :mod:`~specreq.commands.profile` -- save, list, remove and select
  profiles (a saved document location plus base URL and extra headers).

The interactive ``request`` command and the ``paths`` listing live on the
root application in :mod:`specreq.app`.
"""
