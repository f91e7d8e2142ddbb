from .cli import compile_main

compile_main()
