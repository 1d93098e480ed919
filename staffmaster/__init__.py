"""Staff Master: a timed quiz for reading notes on treble, bass and alto staves."""

__version__ = "0.1.0"
