from loadrunner.harness import main

main()
