from fleetindex.cli import main

main()
