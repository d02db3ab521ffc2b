"""Model families and the train / evaluate / select stages.

- One RegressorFamily subclass per algorithm: glm, elastic net, PLS,
  neural net, tree, random forest, gradient boosting (+ optional XGBoost)
- Every family is fit by k-fold grid search on training rows only
- Evaluation scores the held-out rows on the original target scale
"""
