from cratecheck.cli import main

main()
