"""Process exit codes, one per failure class.

Shell wrappers can tell a rejected request from an unreadable spec by
``$?`` alone::

    $ swagctl validate broken.yaml; echo $?
    8

=====  ==============================================================
code   meaning
=====  ==============================================================
1      anything not listed below, including bad configuration
2      wrong arguments: missing spec file, unknown method, bad input
3      the API answered 401 or 403
4      the API answered 404
5      the API answered 5xx
6      the server could not be reached
7      the spec could not be read or parsed
8      the spec parsed but is not a valid Swagger/OpenAPI document
=====  ==============================================================
"""

EXIT_GENERIC_FAILURE = 1
EXIT_INVALID_USAGE = 2

# HTTP outcomes of ``swagctl client``
EXIT_AUTH_FAILURE = 3
EXIT_NOT_FOUND = 4
EXIT_SERVER_ERROR = 5
EXIT_CONNECTION_ERROR = 6

# Spec loading and validation
EXIT_SPEC_PARSE_ERROR = 7
EXIT_SPEC_INVALID = 8
