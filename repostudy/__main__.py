from repostudy.cli.main import main

main()
