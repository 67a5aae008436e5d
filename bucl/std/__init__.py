# Standard library support: host file I/O builtins and the BUCL sources in lib/.
