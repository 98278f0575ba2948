"""docspine command line interface (``docspine --help``)."""
