# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
model classes for the management API: authentication settings of known cloud environments
(`model.endpoints`), and (de)serialisation of list-responses (`model.paging`, `model.metrics`)
'''
