from codestats.backend import main

main()
