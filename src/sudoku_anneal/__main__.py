from sudoku_anneal import main

main()
