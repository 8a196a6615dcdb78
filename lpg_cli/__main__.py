from lpg_cli.cli import main

main()
