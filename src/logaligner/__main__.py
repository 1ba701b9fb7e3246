from logaligner.logaligner import main

main()
