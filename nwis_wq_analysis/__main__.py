from nwis_wq_analysis.pipeline import main

if __name__ == "__main__":
    main()
