from git_scribe.cli import main

main()
