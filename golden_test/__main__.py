from golden_test.main import main


main()
